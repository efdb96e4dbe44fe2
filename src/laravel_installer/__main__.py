from laravel_installer import main

main()
