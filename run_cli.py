import cli.cli

if __name__ == "__main__":
    # Same entry point as the fitcoach-cli console script
    cli.cli.main()
