from monocle.cli.app import main

main()
