from tempmon.main import main

main()
