import sys

from mfa_core.otp_cli import main

sys.exit(main())
