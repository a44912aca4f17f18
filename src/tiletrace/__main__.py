"""
Run with: python -m tiletrace [MAP_IMAGE]
"""
import sys

from tiletrace.main import main

sys.exit(main())
