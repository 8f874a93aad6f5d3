from autowaybler.cli import main

raise SystemExit(main())
