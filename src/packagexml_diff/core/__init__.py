"""packagexml-diff core: options, errors, logging, processes and files."""
