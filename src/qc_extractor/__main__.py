from qc_extractor.cli import run


run()
