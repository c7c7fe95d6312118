"""Test configuration — ensure src modules and test factories are importable."""
import sys
from pathlib import Path

# Add project root to path so `from src.xxx import` works
sys.path.insert(0, str(Path(__file__).parent.parent))
# And this directory, for `from factories import`
sys.path.insert(0, str(Path(__file__).parent))
