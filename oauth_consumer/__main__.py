from __future__ import annotations

from oauth_consumer.main import main

raise SystemExit(main())
