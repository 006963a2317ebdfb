from todo_backend.main import main

main()
