from mathbot.main import main

main()
