from telestore.main import main

main()
