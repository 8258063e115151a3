"""chunklog subcommands. Each module exports register() and run()."""
