import sys
from pathlib import Path

# Make ``import nirify`` work from a plain checkout without installing it.
SRC = Path(__file__).resolve().parent / "src"
if (SRC / "nirify").is_dir() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
