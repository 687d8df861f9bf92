# Standard library of the Parseon runtime: the math builtins and the
# run's input/output channels.
