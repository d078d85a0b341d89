from wacgen.cli import main

main()
