from postboard.server import main

main()
