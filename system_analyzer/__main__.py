from system_analyzer.app import main

main()
