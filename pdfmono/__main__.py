from pdfmono.cli.main import main


main()
