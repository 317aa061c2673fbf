from upgrade_advisor.cli import app

if __name__ == "__main__":
    app()
