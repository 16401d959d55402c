from ploegwissel.cli.cli import main

raise SystemExit(main())
