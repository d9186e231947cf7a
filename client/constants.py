"""Client constants: command names, usage text and exit codes."""

COMMANDS = ["upload", "download", "metadata"]

USAGE = """Usage: filetransfer [--debug] <command> <filename>

Commands:
  upload <path>         Upload a local file (stored under its base name)
  download <filename>   Download a stored file into the downloads directory
  metadata <filename>   Show size and timestamps of a stored file"""

EXIT_SUCCESS = 0
