from launcheq.app import main

main()
