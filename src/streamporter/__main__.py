from streamporter.main import main

raise SystemExit(main())
