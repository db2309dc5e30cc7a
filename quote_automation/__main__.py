"""Allow running as: python -m quote_automation"""

from quote_automation.main import init_sheets, serve
import sys

if __name__ == "__main__":
    if "--init" in sys.argv:
        init_sheets()
    else:
        serve()
