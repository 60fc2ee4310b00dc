from stableui.cli import main

raise SystemExit(main())
