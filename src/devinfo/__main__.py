import sys

from devinfo.rpc_server import main

sys.exit(main())
