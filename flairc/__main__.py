# flairc/__main__.py

from flairc.cli import app

if __name__ == "__main__":
    app()
