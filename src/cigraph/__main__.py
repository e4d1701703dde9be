from cigraph.cli import main

main()
