from sheetimport.cli import main

main()
