from dg_analytics.cli import main

raise SystemExit(main())
