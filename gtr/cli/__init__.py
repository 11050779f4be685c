"""Command-line helpers: input text, SRC:TL language tokens and the config command."""