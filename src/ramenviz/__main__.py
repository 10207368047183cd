"""Command-line interface."""
from ramenviz.main import main

if __name__ == "__main__":
    main()
