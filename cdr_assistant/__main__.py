import sys

from cdr_assistant.mcp_server import main

if __name__ == "__main__":
    sys.exit(main())
