"""
Price-List Recognizer - Entry Point

Run from a checkout without installing:

    python main.py templates new "Shop A" --columns 4 --rows 3
    python main.py recognize photo.jpg --template 3f2a... --catalog catalog.json

The installed console script `pricelist` runs the same pricelist.cli.main.
"""

from pricelist.cli import main


if __name__ == "__main__":
    main()
