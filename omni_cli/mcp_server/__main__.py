from omni_cli.mcp_server import main

main()
