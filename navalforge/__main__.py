from navalforge.bootstrap.entrypoints import main

main()
