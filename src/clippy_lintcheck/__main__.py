from clippy_lintcheck.cli import main

raise SystemExit(main())
