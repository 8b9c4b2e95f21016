from bubble.cli import main

main()
