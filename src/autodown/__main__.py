from autodown.cli import main

raise SystemExit(main())
