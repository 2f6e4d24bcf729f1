from chatflow.cli import main

raise SystemExit(main())
