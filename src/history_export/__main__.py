from history_export.cli import main

raise SystemExit(main())
