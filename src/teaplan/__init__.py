"""teaplan: worker-to-field assignment scheduling for tea plantations."""

__version__ = "0.1.0"
