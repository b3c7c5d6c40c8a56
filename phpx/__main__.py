from phpx.main import main

main()
