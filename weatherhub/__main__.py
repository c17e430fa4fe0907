from weatherhub.cli import main

raise SystemExit(main())
