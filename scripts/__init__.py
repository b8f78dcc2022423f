from deployment.config import load_environment

# `ape run` imports this package before any network option is parsed
load_environment()
