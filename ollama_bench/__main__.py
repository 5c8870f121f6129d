from ollama_bench.cli.main import app

app()
