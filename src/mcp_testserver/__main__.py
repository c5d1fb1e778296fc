from mcp_testserver.cli import main

main()
