from llmify.cli import main

raise SystemExit(main())
