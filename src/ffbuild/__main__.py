from ffbuild.cli import main

raise SystemExit(main())
