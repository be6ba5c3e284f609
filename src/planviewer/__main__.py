"""Command-line interface: python -m planviewer [FILE]"""
from planviewer.main import main

if __name__ == "__main__":
    main()
