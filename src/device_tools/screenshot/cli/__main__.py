from device_tools.screenshot.cli.cli import app

app()
