import sys

from pingone_forms.cli import main

sys.exit(main())
