from express_mcp.cli import main

main()
