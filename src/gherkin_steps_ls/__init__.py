from importlib.metadata import version, PackageNotFoundError


try:
    __version__ = version('gherkin-steps-ls')
except PackageNotFoundError:
    __version__ = 'unknown'
