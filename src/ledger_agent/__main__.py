from ledger_agent.server import main

main()
