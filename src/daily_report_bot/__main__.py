from daily_report_bot.main import main

raise SystemExit(main())
