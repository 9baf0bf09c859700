from typeclassic.app import run

run()
