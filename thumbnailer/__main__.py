from thumbnailer.main import run

run()
