from klarity.cli import main

raise SystemExit(main())
