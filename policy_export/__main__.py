from policy_export.cli import run

run()
