from cookiepm.cli import main

main()
