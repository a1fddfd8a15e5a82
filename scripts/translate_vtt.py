import sys

from vtt_translate.cli import main

if __name__ == "__main__":
    sys.exit(main())
