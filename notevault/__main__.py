from notevault.main import main

raise SystemExit(main())
