def main() -> None:
    """CLI entrypoint for the veritas console script."""
    from veritas.cli.app import app

    app()
