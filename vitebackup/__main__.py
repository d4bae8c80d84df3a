from vitebackup.cli import main

raise SystemExit(main())
