from gitas_installer.cli import main

raise SystemExit(main())
